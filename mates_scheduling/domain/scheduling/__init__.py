"""
Scheduling Domain

Turns members' free-time windows for a group event into ranked candidate
meeting times and commits the chosen one.

Structure:
```
domain/scheduling/
├── intervals.py      # Half-open interval checks
├── availability.py   # Per-member range store (validate + replace)
├── calculator.py     # Coverage sweep and ranking
├── triggers.py       # Submission messages and dispatcher
├── locking.py        # Per-event critical sections
├── service.py        # Orchestrator: trigger, recalculation, finalization
├── repository.py     # Database queries
├── schemas.py        # Request/response models
├── exceptions.py     # Error taxonomy
└── router.py         # HTTP endpoints
```
"""
