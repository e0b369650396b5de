"""Code generation — protocol model into a Rust declaration tree.

Pipeline: resolver (types, hoisting) → assembler (commands, events) →
protocol (domain modules) → passes (recursion breaker, enum defaults) →
render (Rust source text).
"""
