"""Service layer — pipeline orchestration returning ServiceResult.

Services may import from domain, codegen, and infrastructure layers.
They must never import from commands or output.
"""
