"""Benchmarking subsystem for pmbench.

Runs a fixed matrix of package-manager commands in a throwaway
workspace, renders the timings into a bar chart and writes the chart
into a timestamped results directory.
"""
