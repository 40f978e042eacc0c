"""Application layer: state, dispatcher and the engine that applies actions."""
