"""
SpikeParity Test Suite
======================

    python -m pytest tests/                     # Run all tests

Test Invariants:
    ISI       — Periodic sources fire every floor(1000 / rate) ms
    RANGE     — Every counted neuron id lies in [0, N); violations abort
    TOTAL     — Per-neuron counters always sum to the total counter
    PARITY    — Identical network + stimulus → identical counts per backend
    LOCATE    — Divergence reports name the first neuron and timestep
    EDGE      — Construction-time preconditions fail fast

Backend doubles that drop, corrupt or nudge backend output live in
conftest.py.
"""
