"""
crlottery - client engine for a commit-reveal lottery

Provides:
- Secret generation and keccak-256 commitments
- Portable base58 ticket codes and flexible ticket parsing
- Observed block time estimation
- Local custody of creator and ticket secrets
- Phase and action eligibility classification against the lottery contract
"""

__version__ = "0.1.0"
