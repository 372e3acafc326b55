"""
Keystore - Encrypted key records at rest.

- codec:   canonical JSON encoding of version 3 records
- store:   directory-backed, name-keyed record collection
- schemas: JSON Schema validation of decoded records
"""
