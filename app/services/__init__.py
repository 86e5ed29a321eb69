"""
ATLAS Ops - Services Package

Business logic services. Import from the submodules directly.
"""
