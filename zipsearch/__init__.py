"""zipsearch - BM25 similarity search over archive file listings"""
