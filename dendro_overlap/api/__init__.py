"""HTTP API over the dendrogram and the pairwise overlap matrices."""
