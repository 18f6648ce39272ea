"""Pydantic request/response models for the Fiscozen parser API."""
