"""cdpgen — Rust bindings generator for the Chrome DevTools Protocol."""

__version__ = "0.1.0"
