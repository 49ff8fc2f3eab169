"""Pixel canvas, colours, gradients and styled text on matplotlib Agg."""
