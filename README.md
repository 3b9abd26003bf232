# ttail

`ttail` prints the end of a log file that covers a span of **time**, not a
number of lines. It binary-searches the file for the first line whose
timestamp falls inside the requested window. It then copies everything from
that point to standard output. Large files are handled without reading them
in full.

## Installation

```
pip install .
```

Python 3.11 or later is required. There are no third-party dependencies.

## Command line

```
ttail [options] file [file ...]
```

| Option | Default | Meaning |
| ------ | ------- | ------- |
| `-n DURATION` | `10s` | How far back in time to start copying, e.g. `30s`, `5m`, `1h30m`, `1.5h` |
| `-l` | off | Measure the span back from the timestamp of the last line instead of from now |
| `-t TYPE` | `tskv` | Log type that selects the timestamp pattern and layout |
| `-c PATH` | `/etc/ttail/types.toml` | Configuration file with extra or overriding log types |
| `-d` | off | Print debug output to standard error |

Durations are made of numbers followed by the units `ns`, `us`, `ms`, `s`,
`m` or `h`. They may be combined and may carry a sign. A bare `0` is also
accepted.

Examples:

```
ttail -n 5m /var/log/app.log
ttail -l -n 1h -t nginx /var/log/nginx/access.log
```

Files that cannot be found or opened, and directories, are reported on
standard error and skipped. An unknown log type or a broken configuration
file stops the command with exit status 1. Run without file arguments, it
prints usage to standard error and exits with status 1.

If no line of a file carries a timestamp the search can use, the whole file
is printed.

## Log types

The built-in types are `tskv`, `kern`, `apache`, `apache_common`,
`apache_combined`, `nginx`, `nginx_iso`, `java`, `java_iso`, `python`, `go`,
`docker`, `docker_local`, `kubernetes`, `syslog`, `syslog_rfc5424`, `mysql`,
`mysql_general`, `postgresql`, `elasticsearch`, `logstash`, `json`,
`json_time`, `rails` and `django`. They are available as
`ttail.config.BUILTIN_LOG_TYPES`.

A TOML configuration file can add types or replace built-in ones. If the file
does not exist, only the built-in types are used.

```toml
[myapp]
bufSize = 8192
stepsLimit = 256
timeReStr = '^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})'
timeLayout = "2006-01-02 15:04:05"
```

- `timeReStr` is a regular expression whose first group captures the
  timestamp.
- `timeLayout` describes that timestamp using the reference time
  `Mon Jan 2 15:04:05 MST 2006`. For example, `2006-01-02T15:04:05` or
  `02/Jan/2006:15:04:05`.
- `bufSize` sets the size of the read buffer in bytes. The default is 16384.
- `stepsLimit` sets how many buffers are searched backwards for the last
  timestamp. The default is 1024.

Keys that are left out keep their defaults. A table for a built-in name
replaces that type entirely.

## Library use

```python
from datetime import timedelta

from ttail.config import default_options
from ttail.tfile import TimeFile, apply_config

options = default_options()
options.duration = timedelta(minutes=5)
options.time_from_last_line = True
apply_config("nginx", "", options)

with open("/var/log/nginx/access.log", "rb") as handle:
    tfile = TimeFile(handle, options)
    tfile.find_position()
    with open("recent.log", "wb") as out:
        tfile.copy_to(out)
```

`TimeFile` also accepts keyword overrides named after the fields of
`ttail.config.Options`:

- `duration` is a `timedelta` or a number of seconds.
- `time_re` is a compiled pattern or a string.
- `time_layout`, `buf_size`, `steps_limit`, `time_from_last_line` and
  `location` are set as given.

An unknown keyword raises `TypeError`. `options_from_config(log_type,
config_path)` returns such overrides for a configured log type, so they can
be passed straight to `TimeFile`.

After `find_position()`, `TimeFile.offset` holds the byte position found.
`TimeFile.reader()` returns the file positioned there, for callers that want
to process the lines themselves.

Other building blocks:

- `ttail.searcher.TimeSearcher` performs the search itself.
- `ttail.parser.TimeParser` extracts timestamps from lines, and
  `ttail.parser.parse_layout` parses a string against a reference-time layout.
- `ttail.linebuffer.LineBuffer` reads lines at arbitrary offsets.
- `ttail.config.load_config` loads the configuration.

Configuration problems raise `ttail.config.ConfigError`.