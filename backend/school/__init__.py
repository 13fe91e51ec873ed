"""Application package for the Hogwarts school backend.

This package exposes the service, repository and model modules used by
the FastAPI application. Faculties, students and their avatars are the
only aggregates; individual modules contain the concrete implementations.
"""
