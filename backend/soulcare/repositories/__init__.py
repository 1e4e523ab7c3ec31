"""Document-store access, one module per collection family."""
