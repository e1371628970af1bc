"""
Services package for Metaplan.

- stores.py: remote document stores (memory, sheet REST, SQL, Redis)
- sync.py: debounced write-back controller
- identity.py: remembered session identifier
- ai.py: AI collaborator (goal breakdown, daily inspiration)
- runtime.py: wires the above around the active session
"""
