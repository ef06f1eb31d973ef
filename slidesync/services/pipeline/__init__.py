"""
Pipeline stages

    segmentation/  - heuristic splitting, rebalancing and script insights (no AI)
    alignment/     - vision, summary, matching and coaching stages plus the pipeline
"""
