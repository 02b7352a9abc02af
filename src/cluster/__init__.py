"""Master side of the ClusterRec cluster.

This module contains the ingestion of rating data, the user-item matrix
builder and partitioner, worker probing and dispatch, and the aggregation of
worker results into the final ranked list.
"""
