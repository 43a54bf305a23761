"""Notes organised into folders."""
