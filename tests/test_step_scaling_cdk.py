import pytest
from aws_cdk import Duration
from aws_cdk import aws_autoscaling as autoscaling
from aws_cdk import aws_cloudwatch as cloudwatch
from aws_cdk import aws_ec2 as ec2
from aws_cdk.assertions import Match, Template

from scaling_constructs.autoscaling.intervals import ScalingInterval
from scaling_constructs.autoscaling.step_scaling_action import StepScalingAction
from scaling_constructs.autoscaling.step_scaling_policy import StepScalingPolicy, scale_on_metric
from scaling_constructs.autoscaling.thresholds import StepAdjustment
from scaling_constructs.autoscaling.types import AdjustmentType, MetricAggregationType
from scaling_constructs.exceptions import ConfigurationError, UnsupportedStatisticError


def test_step_scaling_policy_resources(cdk_stack, auto_scaling_group, cpu_metric, three_step_intervals):
    policy = StepScalingPolicy(
        cdk_stack, "Cpu",
        auto_scaling_group=auto_scaling_group,
        metric=cpu_metric,
        scaling_steps=three_step_intervals,
        cooldown_seconds=300,
    )
    template = Template.from_stack(cdk_stack)

    template.resource_count_is("AWS::AutoScaling::ScalingPolicy", 2)
    template.resource_count_is("AWS::CloudWatch::Alarm", 2)

    # Scale in below 10
    template.has_resource_properties(
        "AWS::AutoScaling::ScalingPolicy",
        {
            "PolicyType": "StepScaling",
            "AutoScalingGroupName": "test-asg",
            "AdjustmentType": "ChangeInCapacity",
            "Cooldown": "300",
            "MetricAggregationType": "Average",
            "StepAdjustments": [{"ScalingAdjustment": -1, "MetricIntervalUpperBound": 0}],
        },
    )
    template.has_resource_properties(
        "AWS::CloudWatch::Alarm",
        {
            "AlarmDescription": "Lower threshold scaling alarm",
            "ComparisonOperator": "LessThanOrEqualToThreshold",
            "EvaluationPeriods": 1,
            "Period": 60,
            "Threshold": 10,
            "Statistic": "Average",
            "MetricName": "CPUUtilization",
            "Namespace": "AWS/EC2",
            "AlarmActions": [{"Ref": Match.string_like_regexp("^CpuLowerPolicy")}],
        },
    )

    # Scale out above 50
    template.has_resource_properties(
        "AWS::AutoScaling::ScalingPolicy",
        {
            "PolicyType": "StepScaling",
            "StepAdjustments": [{"ScalingAdjustment": 1, "MetricIntervalLowerBound": 0}],
        },
    )
    template.has_resource_properties(
        "AWS::CloudWatch::Alarm",
        {
            "AlarmDescription": "Upper threshold scaling alarm",
            "ComparisonOperator": "GreaterThanOrEqualToThreshold",
            "EvaluationPeriods": 1,
            "Period": 60,
            "Threshold": 50,
            "AlarmActions": [{"Ref": Match.string_like_regexp("^CpuUpperPolicy")}],
        },
    )

    assert policy.lower_alarm is not None
    assert policy.upper_alarm is not None
    assert policy.lower_action.adjustments == policy.plan.lower.adjustments


def test_alarm_period_overrides_metric_period(cdk_stack, auto_scaling_group, three_step_intervals):
    metric = cloudwatch.Metric(
        namespace="AWS/EC2",
        metric_name="CPUUtilization",
        statistic="Maximum",
        period=Duration.minutes(5),
    )

    StepScalingPolicy(
        cdk_stack, "Cpu",
        auto_scaling_group=auto_scaling_group,
        metric=metric,
        scaling_steps=three_step_intervals,
    )
    template = Template.from_stack(cdk_stack)

    alarms = template.find_resources("AWS::CloudWatch::Alarm")
    assert len(alarms) == 2
    for alarm in alarms.values():
        assert alarm["Properties"]["Period"] == 60
        assert alarm["Properties"]["Statistic"] == "Maximum"

    template.all_resources_properties(
        "AWS::AutoScaling::ScalingPolicy", {"MetricAggregationType": "Maximum"}
    )


def test_multiple_steps_in_one_policy(cdk_stack, auto_scaling_group, cpu_metric):
    steps = [
        ScalingInterval(upper=30, change=-1),
        ScalingInterval(lower=30, upper=70, change=0),
        ScalingInterval(lower=70, upper=90, change=2),
        ScalingInterval(lower=90, change=4),
    ]

    StepScalingPolicy(
        cdk_stack, "Cpu",
        auto_scaling_group=auto_scaling_group,
        metric=cpu_metric,
        scaling_steps=steps,
        adjustment_type=AdjustmentType.PERCENT_CHANGE_IN_CAPACITY,
        min_adjustment_magnitude=2,
        estimated_instance_warmup_seconds=240,
    )
    template = Template.from_stack(cdk_stack)

    template.has_resource_properties(
        "AWS::AutoScaling::ScalingPolicy",
        {
            "AdjustmentType": "PercentChangeInCapacity",
            "MinAdjustmentMagnitude": 2,
            "EstimatedInstanceWarmup": 240,
            "StepAdjustments": [
                {
                    "ScalingAdjustment": 2,
                    "MetricIntervalLowerBound": 0,
                    "MetricIntervalUpperBound": 20,
                },
                {"ScalingAdjustment": 4, "MetricIntervalLowerBound": 20},
            ],
        },
    )


def test_zero_change_edge_creates_single_alarm(cdk_stack, auto_scaling_group, cpu_metric):
    policy = StepScalingPolicy(
        cdk_stack, "Cpu",
        auto_scaling_group=auto_scaling_group,
        metric=cpu_metric,
        scaling_steps=[ScalingInterval(upper=50, change=0), ScalingInterval(lower=50, change=3)],
    )
    template = Template.from_stack(cdk_stack)

    template.resource_count_is("AWS::CloudWatch::Alarm", 1)
    template.resource_count_is("AWS::AutoScaling::ScalingPolicy", 1)
    assert policy.lower_alarm is None
    assert policy.lower_action is None


def test_percentile_metric_rejected(cdk_stack, auto_scaling_group, three_step_intervals):
    metric = cloudwatch.Metric(namespace="AWS/EC2", metric_name="CPUUtilization", statistic="p99")

    with pytest.raises(UnsupportedStatisticError):
        StepScalingPolicy(
            cdk_stack, "Cpu",
            auto_scaling_group=auto_scaling_group,
            metric=metric,
            scaling_steps=three_step_intervals,
        )


def test_scale_on_metric_with_imported_group(cdk_stack, auto_scaling_group, cpu_metric, three_step_intervals):
    policy = scale_on_metric(
        auto_scaling_group, "ScaleOnCpu",
        metric=cpu_metric,
        scaling_steps=three_step_intervals,
    )

    # Imported groups aren't constructs, the policy lands in their stack
    assert policy.node.scope is cdk_stack
    template = Template.from_stack(cdk_stack)
    template.resource_count_is("AWS::CloudWatch::Alarm", 2)
    template.all_resources_properties(
        "AWS::AutoScaling::ScalingPolicy", {"AutoScalingGroupName": "test-asg"}
    )


def test_scale_on_metric_with_owned_group(cdk_stack, cpu_metric, three_step_intervals):
    vpc = ec2.Vpc(cdk_stack, "Vpc", max_azs=1)
    group = autoscaling.AutoScalingGroup(
        cdk_stack, "Fleet",
        vpc=vpc,
        instance_type=ec2.InstanceType("t3.micro"),
        machine_image=ec2.MachineImage.latest_amazon_linux2(),
    )

    policy = scale_on_metric(
        group, "ScaleOnCpu",
        metric=cpu_metric,
        scaling_steps=three_step_intervals,
    )

    assert policy.node.scope is group
    template = Template.from_stack(cdk_stack)
    template.resource_count_is("AWS::CloudWatch::Alarm", 2)
    template.all_resources_properties(
        "AWS::AutoScaling::ScalingPolicy",
        {"AutoScalingGroupName": {"Ref": Match.string_like_regexp("^FleetASG")}},
    )


def test_action_requires_a_bound(cdk_stack, auto_scaling_group):
    action = StepScalingAction(
        cdk_stack, "Action",
        auto_scaling_group=auto_scaling_group,
        metric_aggregation_type=MetricAggregationType.AVERAGE,
    )

    with pytest.raises(ConfigurationError):
        action.add_adjustment(StepAdjustment(adjustment=1))

    action.add_adjustment(StepAdjustment(adjustment=1, lower_bound=0))
    action.add_adjustment(StepAdjustment(adjustment=2, lower_bound=10))
    template = Template.from_stack(cdk_stack)

    # Steps render in the order they were added
    template.has_resource_properties(
        "AWS::AutoScaling::ScalingPolicy",
        {
            "StepAdjustments": [
                {"ScalingAdjustment": 1, "MetricIntervalLowerBound": 0},
                {"ScalingAdjustment": 2, "MetricIntervalLowerBound": 10},
            ],
        },
    )
