"""
Common Utilities Package
"""
