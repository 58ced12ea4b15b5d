"""
Services package - Core business logic and integrations

Infrastructure (Technical Concerns):
    - infrastructure/storage: Job records, binary assets, change events
    - infrastructure/providers: Remote generation services (Veo, task API)
    - infrastructure/orchestration: Job state machine and sweep scheduler

Use Cases (Application Layer):
    - use_cases: Submission and read side used by the HTTP routes
"""
