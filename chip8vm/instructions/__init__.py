"""CHIP-8 instruction handlers."""
