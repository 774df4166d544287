"""Client and vendor directory (read-only collaborator)"""
