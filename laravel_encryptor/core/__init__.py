"""Envelope building blocks: algorithm, IV, MAC, envelope codec, primitives."""
