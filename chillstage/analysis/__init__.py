"""Analysis of simulation results."""
