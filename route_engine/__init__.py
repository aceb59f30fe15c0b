"""
Route engine: multi-criteria route optimization and multimodal leg planning.
"""
__version__ = "1.0.0"
