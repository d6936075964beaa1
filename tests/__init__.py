"""
Test Suite for sqlseed

Provides tests for:
- Schema parsing and the dependency graph
- Value generators and row synthesis
- SQL rendering and archive packaging
- Integrity validation
- Configuration management
- Orchestration, CLI and REST API
"""

__version__ = "1.0.0"
