"""Models and error types shared by every pipeline stage."""
