"""Application front ends for cachematrix."""
