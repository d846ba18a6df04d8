"""Recipients file loading and the claims document (root + per-recipient proofs)."""
from .claims import audit_claims, build_claims, load_recipients, read_claims, write_claims  # noqa: F401
from .models import Claim, ClaimsDocument, Recipient  # noqa: F401
