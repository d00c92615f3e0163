"""Owner relationship subsystems.

Each module is a set of pure functions over small state records. The
orchestration that wires them together for a single team lives in
``front_office.service``.
"""
