"""Main CLI entry point for Daybreak."""

import sys
import warnings
from pathlib import Path

import click

from .. import __version__
from ..config import load_settings
from ..core.scene import TimelineType
from ..editor.continuity_tracker import ContinuityForm, DailyEntry, ElementType
from ..io.project_loader import ProjectLoader
from ..logger_config import setup_logging

TIMELINE_CHOICES = [t.value for t in TimelineType]
ELEMENT_TYPE_CHOICES = [t.value for t in ElementType]

timeline_option = click.option(
    '--timeline', 'timeline_name', type=click.Choice(TIMELINE_CHOICES), default='main',
    show_default=True, help='Timeline to work on',
)
project_argument = click.argument('project_path', type=click.Path(exists=True, file_okay=False))


def _fail(action: str, error: Exception) -> None:
    click.echo(f"❌ Error {action}: {error}", err=True)
    sys.exit(1)


def _echo_stale(caught) -> None:
    for warning in caught:
        click.echo(f"⚠️  {warning.message}")


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
@click.pass_context
def cli(ctx, verbose):
    """Daybreak - story days and continuity for shooting scripts"""
    settings = load_settings()
    setup_logging('DEBUG' if verbose else settings.log_level, settings.log_file)
    ctx.ensure_object(dict)
    ctx.obj['project_loader'] = ProjectLoader()


@cli.group()
def project():
    """Project management commands"""
    pass


@cli.group()
def timeline():
    """Story day commands"""
    pass


@cli.group()
def element():
    """Continuity element commands"""
    pass


# Project Commands
@project.command()
@click.argument('project_path', type=click.Path(file_okay=False))
@click.option('--scenes', 'scenes_file', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Scene list exported from the script (JSON or YAML)')
@click.option('--title', help='Production title')
@click.option('--format', 'data_format', type=click.Choice(['json', 'yaml']), help='Storage format')
@click.pass_context
def init(ctx, project_path, scenes_file, title, data_format):
    """Create a project from a scene list and detect story days"""
    try:
        loader = ctx.obj['project_loader']
        scenes = loader.load_scenes(scenes_file)
        production = loader.create_project(Path(project_path), scenes, title=title or "", data_format=data_format)

        click.echo(f"✅ Created project '{production.title}' in {project_path}")
        click.echo(f"🎬 Scenes: {len(production.scenes)}")
        click.echo(f"📅 Main timeline story days: {len(production.story_days())}")
    except Exception as e:
        _fail("creating project", e)


@project.command()
@project_argument
@click.pass_context
def info(ctx, project_path):
    """Show project information"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        stats = production.get_statistics()

        click.echo(f"\n🎬 Production: {stats['title']}")
        click.echo(f"📄 Scenes: {stats['total_scenes']} ({stats['unassigned_scenes']} without a story day)")
        click.echo(f"🧩 Continuity elements: {stats['continuity_elements']}")
        click.echo(f"🔒 Locked: {'yes' if stats['locked'] else 'no'}")
        for name, counts in stats['timelines'].items():
            click.echo(f"  {name}: {counts['days']} days, {counts['scenes']} scenes")
    except Exception as e:
        _fail("getting project info", e)


@project.command()
@project_argument
@click.pass_context
def validate(ctx, project_path):
    """Check timelines and continuity elements for consistency"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        issues = production.validate()

        if not issues:
            click.echo("✅ Project validation passed - no issues found")
        else:
            click.echo(f"⚠️  Found {len(issues)} issues:")
            for issue in issues:
                click.echo(f"  • {issue}")
            sys.exit(1)
    except Exception as e:
        _fail("validating project", e)


# Timeline Commands
@timeline.command()
@project_argument
@click.pass_context
def analyze(ctx, project_path):
    """Detect main-timeline story days from scene times of day"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        result = production.analyze()

        counts = {}
        for scene in result.scenes:
            if scene.detection_confidence is not None:
                key = scene.detection_confidence.value
                counts[key] = counts.get(key, 0) + 1

        click.echo(f"✅ Detected {result.store.day_count} story days")
        for level in ('high', 'medium', 'low'):
            if counts.get(level):
                click.echo(f"  {level} confidence: {counts[level]} scenes")
    except Exception as e:
        _fail("analyzing script", e)


@timeline.command()
@project_argument
@timeline_option
@click.pass_context
def show(ctx, project_path, timeline_name):
    """Show story days and continuity elements of a timeline"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        timeline_type = TimelineType(timeline_name)
        store = production.store(timeline_type)

        first, last = store.scene_range()
        click.echo(f"\n📅 {timeline_type.value} timeline: {store.day_count} days")
        if first is not None:
            click.echo(f"   Scenes {first} - {last}")
        if production.locked:
            click.echo("🔒 Timeline is locked")
        click.echo("=" * 50)

        for day in store.days:
            flags = []
            if day.manually_created:
                flags.append("manual")
            if day.reordered:
                flags.append("reordered")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            scenes = ", ".join(day.scenes) if day.scenes else "(empty)"
            click.echo(f"Day {day.key}{suffix}: {scenes}")

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            visible = production.visible_elements(timeline_type)
        if visible:
            click.echo("\n🧩 Continuity:")
            for item in visible:
                click.echo(
                    f"  • {item.element.name} ({item.element.type.value}): "
                    f"days {item.display_start_day}-{item.display_end_day}"
                )
        _echo_stale(caught)
    except Exception as e:
        _fail("showing timeline", e)


@timeline.command('create-day')
@project_argument
@timeline_option
@click.pass_context
def create_day(ctx, project_path, timeline_name):
    """Append an empty story day"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        result = production.create_day(TimelineType(timeline_name))
        click.echo(f"✅ Created day {result.store.day_count} on the {timeline_name} timeline")
    except Exception as e:
        _fail("creating day", e)


@timeline.command('remove-day')
@project_argument
@click.argument('day', type=int)
@timeline_option
@click.option('--yes', is_flag=True, help='Do not ask before moving scenes')
@click.pass_context
def remove_day(ctx, project_path, day, timeline_name, yes):
    """Remove a story day; its scenes join the previous day (the next one for day 1)"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        timeline_type = TimelineType(timeline_name)
        store = production.store(timeline_type)
        scenes = store.scenes_for_day(day)

        if scenes and not yes:
            if store.day_count == 1:
                destination = "stay on day 1"
            elif store.day_index(day) == 0:
                destination = "be moved to the next day"
            else:
                destination = "be moved to the previous day"
            click.confirm(
                f"Day {day} contains {len(scenes)} scene(s): {', '.join(scenes)}. "
                f"These scenes will {destination}. Continue?",
                abort=True,
            )

        result = production.remove_day(timeline_type, day)
        click.echo(f"✅ Removed day {day}; {result.store.day_count} days remain")
    except click.exceptions.Abort:
        raise
    except Exception as e:
        _fail("removing day", e)


@timeline.command('move-scene')
@project_argument
@click.argument('scene_number')
@click.argument('source_day', type=int)
@click.argument('target_day', type=int)
@click.option('--index', 'insert_index', type=int, help='Position in the target day')
@timeline_option
@click.pass_context
def move_scene(ctx, project_path, scene_number, source_day, target_day, insert_index, timeline_name):
    """Move a scene to another story day"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        result = production.move_scene(TimelineType(timeline_name), scene_number, source_day, target_day, insert_index)
        order = ", ".join(result.store.scenes_for_day(target_day))
        click.echo(f"✅ Moved scene {scene_number} to day {target_day}: {order}")
    except Exception as e:
        _fail("moving scene", e)


@timeline.command('reorder-days')
@project_argument
@click.argument('source_position', type=int)
@click.argument('target_position', type=int)
@timeline_option
@click.pass_context
def reorder_days(ctx, project_path, source_position, target_position, timeline_name):
    """Move a story day from one position to another (positions start at 1)"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        production.reorder_days(TimelineType(timeline_name), source_position - 1, target_position - 1)
        click.echo(f"✅ Moved day at position {source_position} to position {target_position}")
    except Exception as e:
        _fail("reordering days", e)


@timeline.command('reorder-scene')
@project_argument
@click.argument('day', type=int)
@click.argument('source_position', type=int)
@click.argument('target_position', type=int)
@timeline_option
@click.pass_context
def reorder_scene(ctx, project_path, day, source_position, target_position, timeline_name):
    """Reorder a scene within its story day (positions start at 1)"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        result = production.reorder_scene_in_day(
            TimelineType(timeline_name), day, source_position - 1, target_position - 1
        )
        click.echo(f"✅ Day {day}: {', '.join(result.store.scenes_for_day(day))}")
    except Exception as e:
        _fail("reordering scene", e)


@timeline.command('change-timeline')
@project_argument
@click.argument('scene_number')
@click.option('--to', 'to_name', required=True, type=click.Choice(TIMELINE_CHOICES), help='Destination timeline')
@click.option('--from', 'from_name', type=click.Choice(TIMELINE_CHOICES),
              help='Current timeline (looked up when omitted)')
@click.pass_context
def change_timeline(ctx, project_path, scene_number, to_name, from_name):
    """Move a scene to the flashback, dream, other or main timeline"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        if from_name:
            from_type = TimelineType(from_name)
        else:
            located = production.document.locate(scene_number)
            if located is None:
                click.echo(f"❌ Scene {scene_number} is not on any timeline", err=True)
                sys.exit(1)
            from_type = located[0]

        result = production.change_scene_timeline(scene_number, from_type, TimelineType(to_name))
        placed = result.document.locate(scene_number)
        if from_type.value == to_name:
            click.echo(f"Scene {scene_number} is already on the {to_name} timeline")
        else:
            click.echo(f"✅ Scene {scene_number} moved to {to_name} timeline, day {placed[1]}")
    except Exception as e:
        _fail("changing timeline", e)


@timeline.command()
@project_argument
@click.pass_context
def lock(ctx, project_path):
    """Lock day and scene layout"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        production.lock()
        click.echo("🔒 Timeline locked")
    except Exception as e:
        _fail("locking timeline", e)


@timeline.command()
@project_argument
@click.pass_context
def unlock(ctx, project_path):
    """Unlock day and scene layout"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        production.unlock()
        click.echo("🔓 Timeline unlocked")
    except Exception as e:
        _fail("unlocking timeline", e)


# Element Commands
@element.command()
@project_argument
@click.option('--name', prompt='Element name', help='What is being tracked')
@click.option('--type', 'element_type', type=click.Choice(ELEMENT_TYPE_CHOICES), default='injury',
              show_default=True, help='Element type')
@timeline_option
@click.option('--start-scene', prompt='Start scene', help='Scene where the element begins')
@click.option('--end-scene', prompt='End scene', help='Scene where the element ends')
@click.option('--character', 'character_id', help='Character the element belongs to')
@click.pass_context
def add(ctx, project_path, name, element_type, timeline_name, start_scene, end_scene, character_id):
    """Track a new continuity element"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        form = ContinuityForm(
            name=name,
            type=ElementType(element_type),
            timeline=TimelineType(timeline_name),
            start_scene=start_scene,
            end_scene=end_scene,
            character_id=character_id,
        )
        tracker = production.add_element(form)
        created = tracker.elements[-1]
        click.echo(f"✅ Added {created.name} ({created.id}): days {created.start_day}-{created.end_day}")
    except Exception as e:
        _fail("adding element", e)


@element.command()
@project_argument
@click.argument('element_id')
@click.option('--name', help='New name')
@click.option('--type', 'element_type', type=click.Choice(ELEMENT_TYPE_CHOICES), help='New type')
@click.option('--start-scene', help='New start scene')
@click.option('--end-scene', help='New end scene')
@click.option('--character', 'character_id', help='New character')
@click.option('--no-character', 'clear_character', is_flag=True, help='Remove the character')
@click.pass_context
def edit(ctx, project_path, element_id, name, element_type, start_scene, end_scene, character_id, clear_character):
    """Edit a continuity element"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        form = production.element_form(element_id)
        form = ContinuityForm(
            name=name or form.name,
            type=ElementType(element_type) if element_type else form.type,
            timeline=form.timeline,
            start_scene=start_scene or form.start_scene,
            end_scene=end_scene or form.end_scene,
            character_id=None if clear_character else (character_id or form.character_id),
        )
        tracker = production.edit_element(element_id, form)
        updated = tracker.get(element_id)
        click.echo(f"✅ Updated {updated.name}: days {updated.start_day}-{updated.end_day}")
    except Exception as e:
        _fail("editing element", e)


@element.command()
@project_argument
@click.argument('element_id')
@click.argument('day', type=int)
@click.option('--status', default='', help='Status on this day')
@click.option('--notes', default='', help='Notes for this day')
@click.pass_context
def note(ctx, project_path, element_id, day, status, notes):
    """Record status and notes for one day of an element"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        production.set_element_day(element_id, day, DailyEntry(status=status, notes=notes))
        click.echo(f"✅ Updated day {day} of {element_id}")
    except Exception as e:
        _fail("updating element day", e)


@element.command()
@project_argument
@click.argument('element_id')
@click.confirmation_option(prompt='Are you sure you want to delete this continuity element?')
@click.pass_context
def delete(ctx, project_path, element_id):
    """Delete a continuity element"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        before = len(production.tracker)
        tracker = production.delete_element(element_id)
        if len(tracker) == before:
            click.echo(f"📭 No element with id {element_id}")
        else:
            click.echo(f"✅ Deleted {element_id}")
    except Exception as e:
        _fail("deleting element", e)


@element.command('list')
@project_argument
@timeline_option
@click.pass_context
def list_elements(ctx, project_path, timeline_name):
    """List continuity elements of a timeline"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        elements = production.tracker.elements_for_timeline(TimelineType(timeline_name))

        if not elements:
            click.echo("📭 No continuity elements on this timeline")
            return

        for item in elements:
            scenes = f", scenes {item.start_scene}-{item.end_scene}" if item.start_scene else ""
            click.echo(f"🧩 {item.id}: {item}{scenes}")
            for day, entry in sorted(item.daily_tracking.items()):
                if entry.status or entry.notes:
                    click.echo(f"     day {day}: {entry.status} {entry.notes}".rstrip())
    except Exception as e:
        _fail("listing elements", e)


@element.command()
@project_argument
@timeline_option
@click.pass_context
def visible(ctx, project_path, timeline_name):
    """Show elements clipped to the current story days"""
    try:
        production = ctx.obj['project_loader'].load_project(project_path)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            items = production.visible_elements(TimelineType(timeline_name))

        for item in items:
            click.echo(f"{item.element.name}: days {item.display_start_day}-{item.display_end_day}")
        _echo_stale(caught)
    except Exception as e:
        _fail("computing visible elements", e)


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
