"""Certificate policy entities.

A zone references two policy fragments: an identity fragment constraining
subject and SAN values, and a use fragment constraining key types and key
reuse. The merged ``Policy`` is what a request is checked against.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional, Union

from cert_connector.domain.value_objects.identifiers import PolicyId

if TYPE_CHECKING:
    from cert_connector.domain.services.csr_inspector import CsrDetails

POLICY_TYPE_IDENTITY = "CERTIFICATE_IDENTITY"
POLICY_TYPE_USE = "CERTIFICATE_USE"


@dataclass(frozen=True)
class AllowedKeyType:
    """Key algorithm and the sizes or curves allowed for it."""
    key_type: str  # "RSA" or "EC"
    key_lengths: tuple[int, ...] = ()
    key_curves: tuple[str, ...] = ()

    def allows(self, key_type: str, key_length: Optional[int], key_curve: Optional[str]) -> bool:
        if key_type.upper() != self.key_type.upper():
            return False
        if self.key_lengths and key_length not in self.key_lengths:
            return False
        if self.key_curves and key_curve not in self.key_curves:
            return False
        return True

    def __str__(self) -> str:
        options = self.key_lengths or self.key_curves
        return f"{self.key_type}{list(options)}" if options else self.key_type


@dataclass(frozen=True)
class IdentityPolicy:
    """``CERTIFICATE_IDENTITY`` fragment."""
    policy_id: PolicyId
    subject_cn_regexes: tuple[str, ...] = ()
    subject_o_regexes: tuple[str, ...] = ()
    subject_ou_regexes: tuple[str, ...] = ()
    subject_st_regexes: tuple[str, ...] = ()
    subject_l_regexes: tuple[str, ...] = ()
    subject_c_regexes: tuple[str, ...] = ()
    san_regexes: tuple[str, ...] = ()
    name: str = ""


@dataclass(frozen=True)
class UsePolicy:
    """``CERTIFICATE_USE`` fragment."""
    policy_id: PolicyId
    key_types: tuple[AllowedKeyType, ...] = ()
    key_reuse: bool = False
    name: str = ""


PolicyFragment = Union[IdentityPolicy, UsePolicy]


@dataclass(frozen=True)
class Policy:
    """Merged issuance constraints of a zone.

    Empty regex sets leave the attribute unconstrained.
    """
    subject_cn_regexes: tuple[str, ...] = ()
    subject_o_regexes: tuple[str, ...] = ()
    subject_ou_regexes: tuple[str, ...] = ()
    subject_st_regexes: tuple[str, ...] = ()
    subject_l_regexes: tuple[str, ...] = ()
    subject_c_regexes: tuple[str, ...] = ()
    san_regexes: tuple[str, ...] = ()
    key_types: tuple[AllowedKeyType, ...] = ()
    key_reuse: bool = False
    policy_ids: tuple[PolicyId, ...] = field(default=(), compare=False)

    def check(self, details: CsrDetails) -> list[str]:
        """Check a request against the policy.

        Args:
            details: Subject, SANs and key of the request.

        Returns:
            Human-readable violations, empty if the request is allowed.
        """
        violations: list[str] = []
        subject_checks = (
            ("CN", details.common_names, self.subject_cn_regexes),
            ("O", details.organizations, self.subject_o_regexes),
            ("OU", details.organizational_units, self.subject_ou_regexes),
            ("ST", details.provinces, self.subject_st_regexes),
            ("L", details.localities, self.subject_l_regexes),
            ("C", details.countries, self.subject_c_regexes),
            ("SAN", details.dns_names, self.san_regexes),
        )
        for label, values, regexes in subject_checks:
            for value in values:
                if not _matches_any(value, regexes):
                    violations.append(f"{label} {value!r} does not match {list(regexes)}")

        if self.key_types and details.key_type:
            if not any(
                allowed.allows(details.key_type, details.key_length, details.key_curve)
                for allowed in self.key_types
            ):
                violations.append(
                    f"key {details.key_description} is not one of "
                    f"{[str(k) for k in self.key_types]}"
                )
        return violations


def _matches_any(value: str, regexes: tuple[str, ...]) -> bool:
    if not regexes:
        return True
    return any(re.fullmatch(pattern, value) for pattern in regexes)


def merge_policy_fragments(fragments: Iterable[Optional[PolicyFragment]]) -> Policy:
    """Merge policy fragments into one policy.

    Identity fragments contribute subject and SAN regexes, use fragments
    contribute key constraints. ``None`` entries (fragments of a type this
    client does not know) are skipped. Later fragments of the same type
    replace earlier ones.
    """
    identity: Optional[IdentityPolicy] = None
    use: Optional[UsePolicy] = None
    policy_ids: list[PolicyId] = []

    for fragment in fragments:
        if isinstance(fragment, IdentityPolicy):
            identity = fragment
        elif isinstance(fragment, UsePolicy):
            use = fragment
        else:
            continue
        policy_ids.append(fragment.policy_id)

    kwargs: dict = {"policy_ids": tuple(policy_ids)}
    if identity is not None:
        kwargs.update(
            subject_cn_regexes=identity.subject_cn_regexes,
            subject_o_regexes=identity.subject_o_regexes,
            subject_ou_regexes=identity.subject_ou_regexes,
            subject_st_regexes=identity.subject_st_regexes,
            subject_l_regexes=identity.subject_l_regexes,
            subject_c_regexes=identity.subject_c_regexes,
            san_regexes=identity.san_regexes,
        )
    if use is not None:
        kwargs.update(key_types=use.key_types, key_reuse=use.key_reuse)
    return Policy(**kwargs)
