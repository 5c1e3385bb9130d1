"""
Petstagram Backend — API Schemas Package

Pydantic request/response models. JSON keys are camelCase to match the
mobile client (photoUrl, createdAt, isLiked, ...).
"""
