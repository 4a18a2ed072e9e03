from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Profile:
    name: str
    description: str
    include_steps: list[str] | None  # by step title; None means every step


FOLDER_STEP = "Select or create working folder"


PROFILES: dict[str, Profile] = {
    "full": Profile(
        name="full",
        description="Every step, start to finish",
        include_steps=None,
    ),
    "setup": Profile(
        name="setup",
        description="Scaffold the solution and check the empty dashboard",
        include_steps=[
            FOLDER_STEP,
            "Create Directory.Build.props",
            "Enable default watch",
            "Create Aspire projects",
            "(Optional) Open solution in Visual Studio",
            "Create web app",
            "Add web project to solution",
            "Run dotnet watch",
            "Check dashboard shows 'No Resources Found'",
        ],
    ),
    "apphost": Profile(
        name="apphost",
        description="Wire an existing web project into the AppHost",
        include_steps=[
            FOLDER_STEP,
            "Add project reference AppHost -> Web",
            "Register web project in AppHost.cs",
            "Add Aspire.Hosting.Azure.Storage package",
            "Add storage resource to AppHost.cs",
        ],
    ),
}
