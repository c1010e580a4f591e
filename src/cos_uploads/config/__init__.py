"""
Configuration management for the COS uploads service.

Contains the Pydantic settings that describe the object storage endpoint,
bucket and credentials the storage engine is built from.
"""
