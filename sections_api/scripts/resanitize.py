"""Re-run the current sanitizer over the stored projects section.

Run after tightening the sanitizer policy so content saved under an older
policy is brought in line without waiting for the next edit.
"""

from sections_api.core.logging import configure_logging
from sections_api.core.settings import settings
from sections_api.services.sanitizer import sanitize_html
from sections_api.services.storage import StorageResolver


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    resolver = StorageResolver.from_settings(settings)

    artifact = resolver.read_artifact()
    if not artifact.content:
        print("No projects section stored; nothing to do.")
        return

    clean = sanitize_html(artifact.content)
    if clean == artifact.content:
        print(f"Projects section ({artifact.location}) already satisfies the policy.")
        return

    saved = resolver.write_artifact(clean)
    print(
        f"Projects section rewritten to {saved.location}: "
        f"{artifact.size} -> {saved.size} bytes."
    )


if __name__ == "__main__":
    main()
