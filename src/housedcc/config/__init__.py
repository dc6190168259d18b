"""
Layered ConfigObj configuration files, validated against a schema shipped with the package.
"""
