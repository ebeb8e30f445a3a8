"""Flapgate - a one-button arcade game about flying through pipe gaps."""

__version__ = "0.1.0"
