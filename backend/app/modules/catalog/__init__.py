"""
Catalog module.

Two aggregates live in separate documents:
- Topic: a data-structure category that embeds the ordered `questionIds` of
  its questions.
- Question: a practice problem that carries the `topicId` of its owner.

The store offers no foreign keys and no multi-document commit, so every write
that touches both sides goes through `ConsistencyManager`, and
`ConsistencyAuditor` repairs whatever a crash between two writes leaves behind.
"""
