"""Pipeline orchestrator module.

Provides:
- Project and render-job state machines (state)
- The video render polling loop (polling)
- ContentPipeline and run_project, which sequence the generation steps (pipeline)
"""
