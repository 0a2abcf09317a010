"""SQS queue references and permission grants."""

from __future__ import annotations

import logging

from aws_cdk import aws_iam as iam
from aws_cdk import aws_kms as kms
from aws_cdk import aws_sqs as sqs
from constructs import Construct

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONSUME_ACTIONS = (
    "sqs:ReceiveMessage",
    "sqs:ChangeMessageVisibility",
    "sqs:ChangeMessageVisibilityBatch",
    "sqs:GetQueueUrl",
    "sqs:DeleteMessage",
    "sqs:DeleteMessageBatch",
    "sqs:GetQueueAttributes",
)

SEND_ACTIONS = (
    "sqs:SendMessage",
    "sqs:SendMessageBatch",
    "sqs:GetQueueAttributes",
    "sqs:GetQueueUrl",
)

PURGE_ACTIONS = (
    "sqs:PurgeQueue",
    "sqs:GetQueueAttributes",
    "sqs:GetQueueUrl",
)

MAX_VISIBILITY_TIMEOUT_SECONDS = 43200
MIN_RETENTION_SECONDS = 60
MAX_RETENTION_SECONDS = 1209600


class QueueRef(Construct):
    """Reference to a new or existing SQS queue."""

    queue_arn: str
    queue_url: str
    encryption_key: kms.IKey | None = None

    # Owned queues create a queue policy on demand, imported ones can't
    auto_create_policy = False

    def __init__(self, scope: Construct, construct_id: str) -> None:
        super().__init__(scope, construct_id)
        self.policy: sqs.CfnQueuePolicy | None = None
        self.policy_document: iam.PolicyDocument | None = None

    @classmethod
    def from_queue_attributes(
        cls,
        scope: Construct,
        construct_id: str,
        *,
        queue_arn: str,
        queue_url: str,
        key_arn: str | None = None,
    ) -> QueueRef:
        """Import an existing queue."""
        return ImportedQueue(scope, construct_id, queue_arn=queue_arn, queue_url=queue_url, key_arn=key_arn)

    def add_to_resource_policy(self, statement: iam.PolicyStatement) -> bool:
        """Add a statement to the queue's resource policy.

        Returns:
            Whether the statement was added; always False for imported queues
        """
        if self.policy is None and self.auto_create_policy:
            self.policy_document = iam.PolicyDocument()
            self.policy = sqs.CfnQueuePolicy(
                self, "Policy",
                queues=[self.queue_url],
                policy_document=self.policy_document,
            )

        if self.policy_document is None:
            logger.debug(f"{self.node.path}: imported queue, resource policy left untouched")
            return False

        self.policy_document.add_statements(statement)
        return True

    def grant_consume_messages(self, grantee: iam.IGrantable | None) -> iam.Grant | None:
        """Grant permissions to consume messages, and to decrypt them if encrypted."""
        grant = self.grant(grantee, *CONSUME_ACTIONS)
        if grant is not None and self.encryption_key is not None:
            self.encryption_key.grant_decrypt(grantee)
        return grant

    def grant_send_messages(self, grantee: iam.IGrantable | None) -> iam.Grant | None:
        """Grant permissions to send messages, and to encrypt them if encrypted."""
        grant = self.grant(grantee, *SEND_ACTIONS)
        if grant is not None and self.encryption_key is not None:
            self.encryption_key.grant_encrypt_decrypt(grantee)
        return grant

    def grant_purge(self, grantee: iam.IGrantable | None) -> iam.Grant | None:
        """Grant permissions to purge all messages from the queue."""
        return self.grant(grantee, *PURGE_ACTIONS)

    def grant(self, grantee: iam.IGrantable | None, *queue_actions: str) -> iam.Grant | None:
        """Grant ``queue_actions`` on this queue; no-op without a grantee."""
        if grantee is None:
            return None

        return iam.Grant.add_to_principal(
            grantee=grantee,
            actions=list(queue_actions),
            resource_arns=[self.queue_arn],
        )


class Queue(QueueRef):
    """An ``AWS::SQS::Queue`` owned by this stack."""

    auto_create_policy = True

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        queue_name: str | None = None,
        encryption_key: kms.IKey | None = None,
        visibility_timeout_seconds: int | None = None,
        retention_period_seconds: int | None = None,
    ) -> None:
        super().__init__(scope, construct_id)

        if visibility_timeout_seconds is not None and not (
            0 <= visibility_timeout_seconds <= MAX_VISIBILITY_TIMEOUT_SECONDS
        ):
            raise ConfigurationError(
                f"visibility_timeout_seconds must be between 0 and {MAX_VISIBILITY_TIMEOUT_SECONDS}, "
                f"got {visibility_timeout_seconds}",
                config_key="visibility_timeout_seconds",
            )
        if retention_period_seconds is not None and not (
            MIN_RETENTION_SECONDS <= retention_period_seconds <= MAX_RETENTION_SECONDS
        ):
            raise ConfigurationError(
                f"retention_period_seconds must be between {MIN_RETENTION_SECONDS} and "
                f"{MAX_RETENTION_SECONDS}, got {retention_period_seconds}",
                config_key="retention_period_seconds",
            )

        self.resource = sqs.CfnQueue(
            self, "Resource",
            queue_name=queue_name,
            kms_master_key_id=encryption_key.key_arn if encryption_key else None,
            visibility_timeout=visibility_timeout_seconds,
            message_retention_period=retention_period_seconds,
        )
        self.queue_arn = self.resource.attr_arn
        self.queue_url = self.resource.ref
        self.encryption_key = encryption_key


class ImportedQueue(QueueRef):
    """A queue defined outside this stack."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        queue_arn: str,
        queue_url: str,
        key_arn: str | None = None,
    ) -> None:
        super().__init__(scope, construct_id)
        self.queue_arn = queue_arn
        self.queue_url = queue_url
        if key_arn:
            self.encryption_key = kms.Key.from_key_arn(self, "Key", key_arn)
