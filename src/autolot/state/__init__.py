"""State/store layer.

This package owns the vehicle catalog: it is the only place records are
added, changed or removed, and it tells listeners after every write.
"""
