"""
Core utilities shared by every Mementos component.

- exceptions: error hierarchy
- logging_manager: rotating structured logging
- validators: input normalization
- config: runtime settings
- paths: default filesystem locations
"""
