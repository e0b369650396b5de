"""Domain layer — protocol model, naming rules, and schema parsing.

This layer depends only on the standard library.
It must never import from codegen, services, infrastructure, commands, or config.
"""
