"""
Text cleanup, artifact detection and name canonicalization.

Submodules are pure functions over strings; nothing here touches the network.
"""
