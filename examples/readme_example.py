import logging
from dataclasses import dataclass, field

from dskit import (
    ApiResponse,
    Context,
    Key,
    LocalDatastore,
    entity,
    exists_in_datastore,
    generate_unique_slug,
    load,
    save,
    update,
)


@entity(kind="BlogPost")
@dataclass
class Post:
    id: int = 0
    key: Key | None = None
    title: str = ""
    slug: str = ""
    body: str = ""
    tags: list[str] | None = None
    history: list[str] = field(default_factory=list)

    def before_save(self, ctx: Context) -> None:
        if not self.slug:
            self.slug = generate_unique_slug(ctx, Post, self.title)

    def after_save(self, ctx: Context, key: Key) -> None:
        self.history.append(f"saved as {key}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    ctx = Context.create(LocalDatastore(), request_id="demo")

    first = Post(title="Hello, World!", body="first")
    second = Post(title="Hello World", body="second")
    save(ctx, first)
    save(ctx, second)
    print(first.slug, second.slug)  # hello-world hello-world-2

    # Partial update: only the non-empty fields of the patch are applied
    patch = Post(body="edited", tags=["intro"])
    update(first, patch)
    save(ctx, first)

    stored = load(ctx, Post, first.key)
    print(ApiResponse.ok(stored).model_dump_json())
    print(exists_in_datastore(ctx, Post(id=404)))  # False


if __name__ == "__main__":
    main()
