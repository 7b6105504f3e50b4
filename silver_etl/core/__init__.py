"""
Core models, schemas, configuration and entity transforms.
"""
