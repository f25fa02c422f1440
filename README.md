# flix

A small package manager for command-line tools. Give it a git repository URL and
it clones the repository, builds it with `cargo build --release`, and copies the
resulting binary into a bin directory. For repositories on GitHub it can first
look for a pre-built binary on the release page that matches your operating
system and CPU architecture. Each installed package is recorded in a TOML
registry.

Cloning uses the `git` command. Building needs `cargo`. Copying binaries and
creating directories go through `sudo`.

## Installation

```
pip install .
```

This installs the `flix` command. On the first run, copy flix into its bin
directory and hook it into your shell:

```
flix setup
flix shell-init
```

`setup` copies the running `flix` command into the configured bin directory.
This is `/usr/local/flix/bin` unless the registry sets `default_install_path`.

`shell-init` appends the bin directory to `PATH` in `~/.bashrc`, `~/.zshrc` and
`~/.profile`, for each of those files that exists and does not already mention
the directory. It then writes a bash completion script to the `etc` directory
next to the bin directory and sources it from `~/.bashrc` and `~/.zshrc`. After
`update` and `remove`, the completion offers the names of installed packages.

## Usage

Install from source:

```
flix install https://github.com/user/repo
```

The URL must start with `http://`, `https://`, `git://` or `git@`. The package
name is the last path segment of the URL, without `.git`. If a package of that
name is already installed, flix refuses to install it again unless you pass
`-f`.

Prefer a pre-built release binary:

```
flix install -r https://github.com/user/repo
```

If no matching binary is found, flix falls back to building from source. It
checks out the latest release tag when it can find one, and the default branch
otherwise.

Pin a tag or a commit:

```
flix install -V v0.1.0 https://github.com/user/repo
```

List, tag, update and remove packages:

```
flix list
flix list -t cli
flix tag repo -a cli,tools -r old
flix update repo -f
flix remove repo -y
```

`list` prints each package with its release tag, or the first eight characters
of its commit hash, and its tags. `-t` keeps only packages that have one of the
given tags. `-p` keeps only packages installed in the given directory.

`update` without `-f` only reports that a package is up to date. With `-f` it
reinstalls the package from its recorded source at its recorded tag. It
reinstalls every package if no name is given.

`remove` asks for confirmation unless `-y` is given. It then deletes the binary
and drops the package from the registry.

Packages from GitHub URLs are tagged `github` automatically.

### Options shared by install, remove, list and update

| Flag | Meaning |
|------|---------|
| `-q`, `--quiet` | suppress build output |
| `-f`, `--force` | overwrite an existing install / force a fresh build |
| `-y`, `--yes` | skip confirmation prompts |
| `-t`, `--tags` | comma-separated tags to filter by or attach |
| `-p`, `--path` | override the install or search directory |

## Configuration

If `/usr/local/flix` exists, or `USER` is `root`, the registry is
`/usr/local/flix/etc/config.toml`. Otherwise it is `config.toml` in your user
configuration directory. If the registry cannot be written directly, it is
written again through `sudo`. If the registry is unreadable or malformed, flix
treats it as empty.

## Limitations

- Only Cargo projects can be built from source.
- Pre-built binaries are searched for only on GitHub. For other hosts,
  `install -r` always builds from source.
- `flix default --set PATH` only prints a notice. It does not change the
  install directory. To change it, set `default_install_path` in the registry
  by hand.
- The `-d`/`--default` option of `install` is accepted but has no effect.
- `generate-completion` produces bash scripts only.
- `flix.config.interactive_setup()` asks where binaries should go and returns
  the chosen path. No command calls it, and nothing is saved.

## Library use

The modules can also be imported directly. For example,
`flix.config.load_config()` returns a `FlixConfig`, and
`flix.registry.manage_tags(name, add, remove)` returns the tags that were added
and the tags that were removed. It raises
`flix.registry.PackageNotInstalledError` for an unknown package.
`flix.installer.install()` raises `flix.installer.InstallError` when an
installation cannot proceed.