"""External model providers: language model and embeddings."""
