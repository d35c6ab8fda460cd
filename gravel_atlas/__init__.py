"""Gravel Atlas - Draw gravel route segments with live elevation profiles.

The drawing and elevation pipeline behind the Gravel Atlas map:
- Web-Mercator tile math and terrain-RGB elevation decoding
- Concurrent, best-effort elevation sampling from raster tiles
- State machine-based draw mode with undo, snap-to-road and finish
- Windowed grade computation with colored grade buckets
- Segment assembly and persistence

Modules:
    core: Foundation (geo calculations, tile math, sampler, grades, snapping, store)
    model: Data structures (GeoPoint, profile, GradeSegment, FinishedSegment, messages)
    ui: Draw mode state machine, controller, line renderer, profile chart

Example:
    from gravel_atlas.core.elevation_sampler import ElevationSampler, HttpTileSource
    from gravel_atlas.ui import DrawModeController, PydeckLineRenderer
"""
