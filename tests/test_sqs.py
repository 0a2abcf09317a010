import pytest
from aws_cdk import aws_iam as iam
from aws_cdk import aws_kms as kms
from aws_cdk.assertions import Match, Template

from scaling_constructs.exceptions import ConfigurationError
from scaling_constructs.sqs import ImportedQueue, Queue, QueueRef

QUEUE_ARN = "arn:aws:sqs:us-east-1:123456789012:jobs"
QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/jobs"
KEY_ARN = "arn:aws:kms:us-east-1:123456789012:key/1234abcd-12ab-34cd-56ef-1234567890ab"


@pytest.fixture
def role(cdk_stack):
    return iam.Role(cdk_stack, "Role", assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"))


def policy_actions(template: Template) -> list[str]:
    actions = []
    for policy in template.find_resources("AWS::IAM::Policy").values():
        for statement in policy["Properties"]["PolicyDocument"]["Statement"]:
            action = statement["Action"]
            actions.extend([action] if isinstance(action, str) else action)
    return actions


def test_grant_consume_messages(cdk_stack, role):
    queue = Queue(cdk_stack, "Jobs")

    grant = queue.grant_consume_messages(role)
    template = Template.from_stack(cdk_stack)

    assert grant is not None
    assert "sqs:ReceiveMessage" in policy_actions(template)
    assert "sqs:DeleteMessageBatch" in policy_actions(template)
    template.has_resource_properties(
        "AWS::IAM::Policy",
        {
            "PolicyDocument": {
                "Statement": Match.array_with(
                    [
                        Match.object_like(
                            {"Resource": {"Fn::GetAtt": [Match.string_like_regexp("^Jobs"), "Arn"]}}
                        )
                    ]
                )
            }
        },
    )


def test_grant_send_and_purge(cdk_stack, role):
    queue = Queue(cdk_stack, "Jobs")

    queue.grant_send_messages(role)
    queue.grant_purge(role)
    actions = policy_actions(Template.from_stack(cdk_stack))

    assert "sqs:SendMessage" in actions
    assert "sqs:PurgeQueue" in actions
    assert not any(action.startswith("kms:") for action in actions)


def test_grant_without_grantee_is_noop(cdk_stack):
    queue = Queue(cdk_stack, "Jobs")

    assert queue.grant_purge(None) is None
    Template.from_stack(cdk_stack).resource_count_is("AWS::IAM::Policy", 0)


def test_encrypted_queue_grants_key_usage(cdk_stack, role):
    key = kms.Key(cdk_stack, "Key")
    queue = Queue(cdk_stack, "Jobs", encryption_key=key)

    queue.grant_consume_messages(role)
    queue.grant_send_messages(role)
    template = Template.from_stack(cdk_stack)

    template.has_resource_properties(
        "AWS::SQS::Queue",
        {"KmsMasterKeyId": {"Fn::GetAtt": [Match.string_like_regexp("^Key"), "Arn"]}},
    )
    actions = policy_actions(template)
    assert "kms:Decrypt" in actions
    assert "kms:Encrypt" in actions


def test_imported_encrypted_queue_grants_decrypt(cdk_stack, role):
    queue = QueueRef.from_queue_attributes(
        cdk_stack, "Imported", queue_arn=QUEUE_ARN, queue_url=QUEUE_URL, key_arn=KEY_ARN
    )

    queue.grant_consume_messages(role)
    template = Template.from_stack(cdk_stack)

    assert isinstance(queue, ImportedQueue)
    assert "kms:Decrypt" in policy_actions(template)
    template.has_resource_properties(
        "AWS::IAM::Policy",
        {
            "PolicyDocument": {
                "Statement": Match.array_with([Match.object_like({"Resource": QUEUE_ARN})])
            }
        },
    )


def test_owned_queue_creates_resource_policy(cdk_stack):
    queue = Queue(cdk_stack, "Jobs")
    statement = iam.PolicyStatement(
        actions=["sqs:SendMessage"],
        principals=[iam.ServicePrincipal("sns.amazonaws.com")],
        resources=[queue.queue_arn],
    )

    assert queue.add_to_resource_policy(statement) is True
    assert queue.add_to_resource_policy(statement) is True

    template = Template.from_stack(cdk_stack)
    template.resource_count_is("AWS::SQS::QueuePolicy", 1)
    template.has_resource_properties(
        "AWS::SQS::QueuePolicy",
        {
            "Queues": [{"Ref": Match.string_like_regexp("^Jobs")}],
            "PolicyDocument": {
                "Statement": Match.array_with(
                    [Match.object_like({"Action": "sqs:SendMessage", "Effect": "Allow"})]
                )
            },
        },
    )


def test_imported_queue_leaves_resource_policy_alone(cdk_stack):
    queue = QueueRef.from_queue_attributes(
        cdk_stack, "Imported", queue_arn=QUEUE_ARN, queue_url=QUEUE_URL
    )
    statement = iam.PolicyStatement(actions=["sqs:SendMessage"], resources=[QUEUE_ARN])

    assert queue.add_to_resource_policy(statement) is False
    assert queue.encryption_key is None
    Template.from_stack(cdk_stack).resource_count_is("AWS::SQS::QueuePolicy", 0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"visibility_timeout_seconds": -1},
        {"visibility_timeout_seconds": 43201},
        {"retention_period_seconds": 59},
        {"retention_period_seconds": 1209601},
    ],
)
def test_queue_limits(cdk_stack, kwargs):
    with pytest.raises(ConfigurationError):
        Queue(cdk_stack, "Jobs", **kwargs)


def test_queue_properties(cdk_stack):
    Queue(
        cdk_stack, "Jobs",
        queue_name="jobs",
        visibility_timeout_seconds=120,
        retention_period_seconds=345600,
    )

    Template.from_stack(cdk_stack).has_resource_properties(
        "AWS::SQS::Queue",
        {"QueueName": "jobs", "VisibilityTimeout": 120, "MessageRetentionPeriod": 345600},
    )
