"""
Tests package for the config version webhook.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Deployment and admission review builders
"""
