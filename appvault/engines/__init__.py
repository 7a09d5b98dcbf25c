"""
Engines that operate on the vault state.

Each engine wraps the working copy of the state handed out by the engine
facade's transaction; none of them persists anything itself.
"""
