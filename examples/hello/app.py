"""Hello World -- the simplest kiln example.

Compile a template from a string and render it with context variables.
No templates directory and no cache files needed.

Run:
    python app.py
"""

import tempfile

from kiln import Environment

env = Environment(cache_dir=tempfile.mkdtemp(prefix="kiln-hello-"))

# Compile from string (never cached)
template = env.from_string("Hello, {{ name }}!")

# Render with context
output = template.render(name="World")

# Dotted access works for dicts and objects alike
profile = env.from_string("{{ user.name }} <{{ user.email }}>")
profile_output = profile.render(user={"name": "Ada", "email": "ada@example.com"})


def main() -> None:
    print(output)
    print(profile_output)
    print()

    # Multiple renders with different context
    for name in ["kiln", "Python"]:
        print(template.render(name=name))


if __name__ == "__main__":
    main()
