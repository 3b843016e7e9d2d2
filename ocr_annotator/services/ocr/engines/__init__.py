"""
Recognition engines
"""
