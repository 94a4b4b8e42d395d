"""Scaffolder for modular monolith projects (Node.js/TypeScript, React, Docker, Kubernetes)."""

__version__ = "0.1.0"
