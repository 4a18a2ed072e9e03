"""Demonstration step table: a condensed PhotoGallery hot-reload walkthrough.

The engine accepts any step list; this one exercises every step kind against
an Aspire AppHost plus a web project.
"""

from __future__ import annotations

from dataclasses import replace
from functools import partial
from pathlib import Path

from ..core.model import Step, StepAction
from ..core.patch import ensure_line_present, insert_after_marker, insert_before_marker, replace_block_starting_with
from ..utils.files import first_dir_matching, first_file_matching, package_reference_version
from ..utils.log_format import step_log_name
from .kinds import (
    ChooseWorkingDirectory,
    CreateDirectory,
    CreateFile,
    ManualPause,
    PatchFile,
    RunCommand,
    RunInteractive,
    relative,
)


PREREQUISITES = [
    "Install the latest .NET SDK (https://github.com/dotnet/dotnet)",
    "Install the latest daily Aspire CLI (https://github.com/dotnet/aspire)",
    "Install PowerShell 7 (pwsh) or set STEPRUNNER_SHELL to another shell",
]


DIRECTORY_BUILD_PROPS = """<Project>
  <PropertyGroup>
    <HotReloadAutoRestart>true</HotReloadAutoRestart>
  </PropertyGroup>
</Project>
"""

PHOTO_LIST_RAZOR = """@code {
    [Parameter]
    public IEnumerable<string> Photos { get; set; } = [];
}

<html>
<head>
    <title>Photo List</title>
</head>
<body>
    <h1>Photo Gallery</h1>
    <ul>
        @foreach (var photo in Photos)
        {
            <li>@photo</li>
        }
    </ul>
</body>
</html>
"""

APPHOST_ADD_PROJECT = 'builder.AddProject<Projects.PhotoGallery_Web>("webapp");'

APPHOST_STORAGE = """var photos = builder.AddAzureStorage("storage")
                        .RunAsEmulator()
                        .AddBlobs("blobs")
                        .AddBlobContainer("photos");"""

WEB_MAP_GET = """app.MapGet("/", () =>
{
    string[] photos = ["sample.jpg"];
    return new RazorComponentResult<PhotoList>(new { Photos = photos });
});"""


def apphost_dir(root: Path) -> Path | None:
    return first_dir_matching(root, "*.AppHost")


def web_dir(root: Path) -> Path | None:
    return first_dir_matching(root, "*.Web")


def _in_apphost(*parts: str):
    def _resolve(root: Path) -> Path | None:
        d = apphost_dir(root)
        return d.joinpath(*parts) if d is not None else None

    return _resolve


def _in_web(*parts: str):
    def _resolve(root: Path) -> Path | None:
        d = web_dir(root)
        return d.joinpath(*parts) if d is not None else None

    return _resolve


def add_web_to_solution(root: Path):
    sln = first_file_matching(root, "*.sln") or first_file_matching(root, "*.slnx")
    if sln is None:
        return None
    return ["dotnet", "sln", sln.name, "add", str(Path("PhotoGallery.Web") / "PhotoGallery.Web.csproj")]


def add_apphost_reference(root: Path):
    host, web = apphost_dir(root), web_dir(root)
    if host is None or web is None:
        return None
    host_proj = first_file_matching(host, "*.csproj")
    web_proj = first_file_matching(web, "*.csproj")
    if host_proj is None or web_proj is None:
        return None
    if web_proj.name.lower() in host_proj.read_text(encoding="utf-8").lower():
        return None
    return ["dotnet", "add", str(host_proj), "reference", str(web_proj)]


def add_storage_package(root: Path):
    host = apphost_dir(root)
    host_proj = first_file_matching(host, "*.csproj") if host is not None else None
    if host_proj is None:
        return None
    if "Aspire.Hosting.Azure.Storage" in host_proj.read_text(encoding="utf-8"):
        return None

    version = package_reference_version(host_proj, "Aspire.Hosting.AppHost")
    cmd = ["dotnet", "add", str(host_proj), "package", "Aspire.Hosting.Azure.Storage"]
    return cmd + (["--version", version] if version else ["--prerelease"])


class _Table:
    def __init__(self) -> None:
        self.steps: list[Step] = []

    def add(self, title: str, action: StepAction, description: str = "") -> Step:
        number = len(self.steps) + 1
        if isinstance(action, RunCommand) and action.log_name is None:
            action = replace(action, log_name=step_log_name(number, title), log_title=title, log_step=number)
        step = Step(number=number, title=title, action=action, description=description)
        self.steps.append(step)
        return step


def steps() -> list[Step]:
    """Build a fresh step list (statuses all Pending)."""

    t = _Table()

    t.add(
        "Select or create working folder",
        ChooseWorkingDirectory(),
        "Prompt for (or create) an empty folder to work in.",
    )
    t.add(
        "Create Directory.Build.props",
        CreateFile(relative("Directory.Build.props"), DIRECTORY_BUILD_PROPS),
        "Creates Directory.Build.props enabling HotReloadAutoRestart.",
    )
    t.add(
        "Enable default watch",
        RunCommand("aspire config set features.defaultWatchEnabled true -g"),
        "Runs: aspire config set features.defaultWatchEnabled true -g",
    )
    t.add(
        "Create Aspire projects",
        RunInteractive(
            "aspire",
            ["new", "-n", "PhotoGallery", "-o", "./"],
            intro="Launching interactive 'aspire new'. Choose 'AppHost and service defaults', then return here.",
            outro="If generation succeeded you should now have a solution (e.g. PhotoGallery.sln).",
        ),
        "Launches 'aspire new' interactively.",
    )
    t.add(
        "(Optional) Open solution in Visual Studio",
        ManualPause("If using Visual Studio, open the generated solution now."),
    )
    t.add(
        "Create web app",
        RunCommand("dotnet new web -o PhotoGallery.Web -f net9.0"),
        "Runs: dotnet new web -o PhotoGallery.Web -f net9.0",
    )
    t.add(
        "Add web project to solution",
        RunCommand(add_web_to_solution, skip_message="No solution file found; skipping add project."),
        "Runs: dotnet sln add PhotoGallery.Web (skip if Visual Studio already added it).",
    )
    t.add(
        "Run dotnet watch",
        RunInteractive(
            "dotnet",
            ["watch", "--verbose", "--non-interactive"],
            intro="Launching 'dotnet watch' (Ctrl+C to stop and return).",
        ),
        "Runs: dotnet watch --verbose --non-interactive. Stop it with Ctrl+C to continue.",
    )
    t.add(
        "Check dashboard shows 'No Resources Found'",
        ManualPause("Open the dashboard and verify that no resources are listed yet."),
    )
    t.add(
        "Add project reference AppHost -> Web",
        RunCommand(add_apphost_reference, skip_message="Reference already present or projects missing; skipping."),
    )
    t.add(
        "Register web project in AppHost.cs",
        PatchFile(
            _in_apphost("AppHost.cs"),
            (partial(insert_after_marker, marker="var builder", line=APPHOST_ADD_PROJECT),),
        ),
        "Inserts builder.AddProject after the builder declaration.",
    )
    t.add(
        "Add Aspire.Hosting.Azure.Storage package",
        RunCommand(add_storage_package, skip_message="Package already referenced or AppHost missing; skipping."),
        "Matches the AppHost's Aspire version when it can be read.",
    )
    t.add(
        "Add storage resource to AppHost.cs",
        PatchFile(
            _in_apphost("AppHost.cs"),
            (partial(insert_after_marker, marker="var builder", line=APPHOST_STORAGE),),
        ),
    )
    t.add(
        "Add Razor components to web Program.cs",
        PatchFile(
            _in_web("Program.cs"),
            (
                partial(ensure_line_present, line="using Microsoft.AspNetCore.Http.HttpResults;"),
                partial(insert_after_marker, marker="var builder", line="builder.Services.AddRazorComponents();"),
                partial(insert_before_marker, marker="app.Run()", line="app.UseStaticFiles();"),
            ),
        ),
    )
    t.add("Create Components folder", CreateDirectory(_in_web("Components")))
    t.add("Add PhotoList.razor", CreateFile(_in_web("Components", "PhotoList.razor"), PHOTO_LIST_RAZOR))
    t.add(
        "Return PhotoList from MapGet",
        PatchFile(
            _in_web("Program.cs"),
            (partial(replace_block_starting_with, start_marker="app.MapGet(", block=WEB_MAP_GET),),
        ),
        "Replaces the app.MapGet statement with one rendering PhotoList.",
    )
    t.add(
        "Final verification",
        ManualPause(
            "Browse to the web app and check the photo list renders.",
            checklist=("Page title is 'Photo List'", "Dashboard shows no errors"),
        ),
    )

    return t.steps
