"""Command-line interface for scaling constructs.

Provides CLI commands to inspect step scaling plans and synthesize the
CloudFormation template for a configured environment. Nothing is deployed.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .autoscaling.planning import AlarmPlan, StepScalingPlan, plan_step_scaling
from .config import ScalingConfig, load_config
from .exceptions import ScalingConstructsError

app = typer.Typer(
    name="scaling-constructs",
    help="Scaling Constructs - step scaling planning and synthesis CLI",
    rich_markup_mode="rich",
)
console = Console()
# Status lines go to stderr so `synth` can stream the template on stdout
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(env: str, config_path: Path | None, log_level: str | None) -> ScalingConfig:
    config = load_config(env, config_path)
    configure_logging(log_level or config.log_level)
    err_console.print(f"✅ Loaded config for environment: {env}")
    return config


@app.command()
def plan(
    env: str = typer.Option("dev", help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    policy: str | None = typer.Option(None, help="Only show this policy"),
    log_level: str | None = typer.Option(None, help="Override the configured log level"),
) -> None:
    """Show normalized intervals, alarm thresholds and step tables."""
    console.print("[bold blue]📐 Planning step scaling policies...[/bold blue]")

    try:
        config = _load(env, config_path, log_level)
        policies = [config.get_policy(policy)] if policy else config.policies

        for policy_config in policies:
            scaling_plan = plan_step_scaling(
                policy_config.to_scaling_intervals(),
                statistic=policy_config.metric.statistic,
                adjustment_type=policy_config.adjustment_type,
                cooldown_seconds=policy_config.cooldown_seconds,
                estimated_instance_warmup_seconds=policy_config.estimated_instance_warmup_seconds,
                min_adjustment_magnitude=policy_config.min_adjustment_magnitude,
            )
            _display_plan(policy_config.name, scaling_plan)

        console.print(f"[bold green]✅ Planned {len(policies)} policies[/bold green]")

    except KeyError as e:
        console.print(f"[bold red]❌ {e.args[0]}[/bold red]")
        sys.exit(1)
    except FileNotFoundError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)
    except ScalingConstructsError as e:
        console.print(f"[bold red]❌ Planning failed: {e}[/bold red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[bold red]❌ Invalid configuration: {e}[/bold red]")
        sys.exit(1)


@app.command()
def synth(
    env: str = typer.Option("dev", help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    output: Path | None = typer.Option(None, help="Write the template here instead of stdout"),
    log_level: str | None = typer.Option(None, help="Override the configured log level"),
) -> None:
    """Synthesize the CloudFormation template for an environment."""
    try:
        config = _load(env, config_path, log_level)

        import aws_cdk as cdk

        from .stack import ScalingStack

        cdk_app = cdk.App()
        stack = ScalingStack(cdk_app, f"scaling-constructs-{env}", config)
        assembly = cdk_app.synth()
        template = assembly.get_stack_artifact(stack.artifact_id).template

        rendered = json.dumps(template, indent=2, sort_keys=True)
        if output:
            output.write_text(rendered + "\n", encoding="utf-8")
            console.print(f"💾 Template saved to: {output}")
        else:
            typer.echo(rendered)

    except FileNotFoundError as e:
        err_console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)
    except ScalingConstructsError as e:
        err_console.print(f"[bold red]❌ Synthesis failed: {e}[/bold red]")
        sys.exit(1)
    except ValueError as e:
        err_console.print(f"[bold red]❌ Invalid configuration: {e}[/bold red]")
        sys.exit(1)


def _format_bound(value: float | None, infinity: str) -> str:
    return infinity if value is None else f"{value:g}"


def _display_plan(name: str, scaling_plan: StepScalingPlan) -> None:
    """Display intervals and alarm tables of one policy."""
    table = Table(title=f"{name}: intervals ({scaling_plan.adjustment_type.value})")
    table.add_column("#", style="cyan")
    table.add_column("Lower", style="green")
    table.add_column("Upper", style="green")
    table.add_column("Change", style="yellow")

    for index, interval in enumerate(scaling_plan.intervals):
        table.add_row(
            str(index),
            _format_bound(interval.lower_value, "-∞"),
            _format_bound(interval.upper_value, "+∞"),
            f"{interval.change:+d}",
        )
    console.print(table)

    if not scaling_plan.alarms:
        console.print("[yellow]⚠️  No alarms: this policy never scales[/yellow]")
    for alarm in scaling_plan.alarms:
        _display_alarm(scaling_plan, alarm)


def _display_alarm(scaling_plan: StepScalingPlan, alarm: AlarmPlan) -> None:
    table = Table(
        title=(
            f"{alarm.description}: metric {alarm.comparison_operator.value} {alarm.threshold:g} "
            f"({scaling_plan.metric_aggregation_type.value}, {alarm.period_seconds}s)"
        )
    )
    table.add_column("Lower bound", style="green")
    table.add_column("Upper bound", style="green")
    table.add_column("Adjustment", style="yellow")

    for step in alarm.adjustments:
        table.add_row(
            _format_bound(step.lower_bound, "-∞"),
            _format_bound(step.upper_bound, "+∞"),
            f"{step.adjustment:+d}",
        )
    console.print(table)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
