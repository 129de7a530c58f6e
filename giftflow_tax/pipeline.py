"""Wish verification pipeline.

Wraps the eligibility rules with document intake:
1. Pre-verified wishes are accepted without looking at documents
2. Each document is OCR'd, fingerprinted and classified
3. A fingerprint seen on an earlier wish rejects the wish as a duplicate
4. Document hints fill in category and vendor, then the rules run

Persisting the decision is the caller's job; ``status_for`` and
``audit_entry`` give the values to store.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Set

from .document_parser import DocumentParser, detect_document_type, document_hash
from .eligibility import DEFAULT_POLICY, EligibilityPolicy, analyze_documents, verify_wish_eligibility
from .models import (
    DocumentType, VerificationContext, VerificationOutcome, VerificationResult, WishDocument,
)

logger = logging.getLogger(__name__)


class WishType(Enum):
    PREVERIFIED = "PREVERIFIED"
    CUSTOM = "CUSTOM"


class WishStatus(Enum):
    """Status stored on the wish record after verification."""
    ELIGIBLE = "ELIGIBLE"
    REJECTED = "REJECTED"
    UNDER_REVIEW = "UNDER_REVIEW"


STATUS_BY_OUTCOME = {
    VerificationOutcome.ELIGIBLE: WishStatus.ELIGIBLE,
    VerificationOutcome.REJECT: WishStatus.REJECTED,
    VerificationOutcome.REVIEW: WishStatus.UNDER_REVIEW,
}


@dataclass
class WishVerificationInput:
    """A wish as submitted by a charity."""
    wish_id: str
    wish_type: WishType
    title: str
    description: str
    category: str
    documents: List[str] = field(default_factory=list)  # file paths or urls


@dataclass
class ProcessedDocument:
    """A document after OCR and classification."""
    source: str
    type: DocumentType
    text: str
    hash: str


@dataclass
class PipelineResult:
    """Verification result plus the documents that produced it."""
    verification: VerificationResult
    processed_documents: List[ProcessedDocument] = field(default_factory=list)
    document_confidence: float = 0.0

    @property
    def result(self) -> VerificationOutcome:
        return self.verification.result


@dataclass
class AuditEntry:
    """Audit trail record for a verification decision."""
    entity_id: str
    result: str
    confidence: float
    document_count: int
    actor: str = "system"
    entity_type: str = "wish"
    action: str = "verify"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class DocumentRegistry(Protocol):
    """Lookup of document fingerprints already attached to wishes."""

    def contains(self, doc_hash: str) -> bool: ...

    def add(self, doc_hash: str) -> None: ...


class InMemoryDocumentRegistry:
    """Document fingerprints held in a set."""

    def __init__(self, hashes: Optional[Iterable[str]] = None):
        self._hashes: Set[str] = set(hashes or ())

    def contains(self, doc_hash: str) -> bool:
        return doc_hash in self._hashes

    def add(self, doc_hash: str) -> None:
        self._hashes.add(doc_hash)

    def __len__(self) -> int:
        return len(self._hashes)


def status_for(outcome: VerificationOutcome) -> WishStatus:
    return STATUS_BY_OUTCOME[outcome]


def audit_entry(wish_id: str, result: PipelineResult) -> AuditEntry:
    return AuditEntry(
        entity_id=wish_id,
        result=result.verification.result.value,
        confidence=result.verification.confidence,
        document_count=len(result.processed_documents),
    )


class VerificationPipeline:
    """Run document intake and eligibility rules for submitted wishes."""

    def __init__(
        self,
        extract_text: Optional[Callable[[str], str]] = None,
        registry: Optional[DocumentRegistry] = None,
        policy: EligibilityPolicy = DEFAULT_POLICY,
    ):
        """
        Args:
            extract_text: Returns the text of a document path/url
                          (defaults to DocumentParser OCR).
            registry: Fingerprints of documents on earlier wishes.
            policy: Eligibility rules to apply.
        """
        self.extract_text = extract_text or DocumentParser().extract_text
        self.registry = registry if registry is not None else InMemoryDocumentRegistry()
        self.policy = policy

    def run(self, wish: WishVerificationInput) -> PipelineResult:
        """Verify one wish."""
        if wish.wish_type == WishType.PREVERIFIED:
            return PipelineResult(VerificationResult(
                result=VerificationOutcome.ELIGIBLE,
                reasons=["Pre-verified category - automatically eligible"],
                policy_refs=["Pre-verified tax-deductible categories"],
                confidence=1.0,
            ))

        processed: List[ProcessedDocument] = []
        for source in wish.documents:
            try:
                text = self.extract_text(source)
            except Exception as e:
                # Corrupt uploads raise whatever the PDF or OCR library raises
                logger.warning("Document processing failed for %s on wish %s: %s",
                               source, wish.wish_id, e)
                continue

            doc = ProcessedDocument(
                source=source,
                type=detect_document_type(text),
                text=text,
                hash=document_hash(text),
            )
            processed.append(doc)

            if self.registry.contains(doc.hash):
                logger.info("Wish %s rejected: duplicate document %s", wish.wish_id, source)
                return PipelineResult(
                    VerificationResult(
                        result=VerificationOutcome.REJECT,
                        reasons=["Duplicate document detected"],
                        policy_refs=["Anti-fraud policy"],
                        confidence=0.9,
                    ),
                    processed_documents=processed,
                )

        documents = [WishDocument(type=d.type, content=d.text) for d in processed]
        analysis = analyze_documents(documents)

        context = VerificationContext(
            category=analysis.category or wish.category,
            description=wish.description,
            vendor_info=analysis.vendor_info,
            documents=documents,
        )
        verification = verify_wish_eligibility(context, self.policy)
        logger.info("Wish %s verified: %s (confidence %.2f)",
                    wish.wish_id, verification.result.value, verification.confidence)

        return PipelineResult(
            verification=verification,
            processed_documents=processed,
            document_confidence=analysis.confidence,
        )

    def record(self, wish_id: str, result: PipelineResult) -> AuditEntry:
        """Remember the wish's document fingerprints and build its audit entry."""
        for doc in result.processed_documents:
            self.registry.add(doc.hash)
        return audit_entry(wish_id, result)

    def batch_verify(self, wishes: Iterable[WishVerificationInput]) -> Dict[str, PipelineResult]:
        """
        Verify and record several wishes in order.

        A wish that fails is logged and left out of the result; the
        remaining wishes are still verified.
        """
        results = {}
        for wish in wishes:
            try:
                result = self.run(wish)
                self.record(wish.wish_id, result)
            except Exception as e:
                logger.error("Verification failed for wish %s: %s", wish.wish_id, e)
                continue
            results[wish.wish_id] = result
        return results
