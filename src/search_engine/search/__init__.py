"""
Search storage and query engine package.

- tokenizer: Whitespace/punctuation splitting with ASCII transliteration
- similarity: Term-frequency cosine similarity
- codec: Length-prefixed binary encoding of token segments
- storage: DocumentStore contract, with SQLite and Redis backends
- engine: Candidate filtering and ranking over a full scan
"""
