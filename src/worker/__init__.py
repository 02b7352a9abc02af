"""Worker side of the ClusterRec cluster.

Each worker receives one partition of the user-item matrix, computes item
co-occurrence scores, scales them and returns predicted scores.
"""
