# pinyintools

pinyintools is a library for the data that a pinyin input method keeps for its user. It has no dependencies outside the standard library.

| Module | What it does |
| --- | --- |
| `pinyintools.customphrase` | Reads and writes the custom phrase format, and expands dynamic phrases. |
| `pinyintools.customphrasemodel` | Gives an editable table of rows backed by a custom phrase file. |
| `pinyintools.filelistmodel` | Lists `.dict` dictionary files and turns each one on or off. |
| `pinyintools.pipeline` | Runs jobs one after another. |
| `pinyintools.jobs` | Holds the jobs that the pipeline runs: renaming a file and downloading a file. |
| `pinyintools.sogou` | Recognises Sogou cell dictionary download links. |

## Installation

```
pip install .
```

To install pytest for the test suite as well:

```
pip install .[test]
```

## Custom phrases

### File format

A custom phrase file is made of lines of the form `key,order=value`.

- **Key:** one or more ASCII letters.
- **Order:** a non-zero integer. A negative order marks the entry as disabled.
- **Comments:** lines that start with `#` or `;` are comments.
- **Escaped values:** a value wrapped in double quotes is unescaped. Write `\n` for a newline, `\\` for a backslash and `\"` for a double quote.
- **Multi-line values:** an empty value starts a multi-line phrase. It takes in the lines that follow, up to the next valid entry line.

### Loading, saving and editing

Create a dictionary with `CustomPhraseDict()`.

- `load(stream, load_disabled)` replaces the contents with the phrases read from `stream`. Disabled entries are skipped unless `load_disabled` is true.
- When loading, the phrases under each key are sorted by order. The orders of enabled phrases are then raised so that they strictly increase.
- `save(stream)` writes every phrase back, with keys in byte order. A value is quoted and escaped only where escaping changes it.
- `lookup(key)` returns the list of `CustomPhrase` objects for a key, or `None` if the key is unknown.
- `items()` yields `(key, phrases)` pairs.
- `add_phrase(key, value, order)` appends a phrase. An order of `0` is ignored.
- `pin_phrase(key, value)` moves a phrase to the front.
- `remove_phrase(key, value)` deletes a phrase.
- `clear()` removes everything.

### Dynamic phrases

A phrase whose value starts with `#` is dynamic (`CustomPhrase.is_dynamic()`).

`CustomPhrase.evaluate(evaluator)` replaces each `$name` and `${name}` in a dynamic phrase with the result of calling `evaluator(name)`. Write `$$` to get a literal `$`. A phrase that is not dynamic is returned unchanged.

`builtin_evaluator(key, now)` provides these date and time variables:

- Year: `year`, `year_yy`
- Month: `month`, `month_mm`
- Day: `day`, `day_dd`
- Weekday: `weekday`, where 0 is Sunday
- Hour: `fullhour`, `halfhour`
- Other time parts: `ampm`, `minute`, `second`
- Chinese forms: each of the above with a `_cn` suffix, for example `year_cn` or `ampm_cn`

`now` is a `datetime`. Pass `None` to use the current local time. An unknown name gives `""`.

### Example

```python
import io
from pinyintools.customphrase import CustomPhraseDict, builtin_evaluator

source = io.StringIO("sj,1=#$fullhour:$minute\nhi,1=Hello\n")
phrases = CustomPhraseDict()
phrases.load(source, False)

for phrase in phrases.lookup("sj"):
    print(phrase.evaluate(lambda name: builtin_evaluator(name, None)))

out = io.StringIO()
phrases.save(out)
print(out.getvalue())
```

### Helper functions

`customphrase` also exports these helpers:

- `parse_custom_phrase_line`
- `normalize_phrases`
- `escape_for_value`
- `unescape_for_value`
- `to_chinese_year`
- `to_chinese_weekday`
- `to_chinese_two_digit_number`

## Editing a custom phrase file

`CustomPhraseModel(path, on_need_save_changed)` keeps rows of `CustomPhraseItem`. Each item has four fields: `key`, `value`, a positive `order` and an `enabled` flag.

If no path is given, the model uses `$XDG_DATA_HOME/fcitx5/pinyin/customphrase`. When `XDG_DATA_HOME` is not set, it uses `~/.local/share/fcitx5/pinyin/customphrase`.

### Methods

- `load()` reads the file. Disabled entries are included, and a missing file gives no rows.
- `save()` writes the file atomically. Each save starts with a commented header that explains the format and the built-in variables.
- `add_item()` adds a row.
- `delete_item()` deletes one row.
- `delete_all_items()` deletes every row.
- `set_data(row, column, value)` changes one cell.
- `data(row, column)` returns the value of one cell.
- `header(column)` returns a column title.

Columns are given by the `Column` enum: `ENABLE`, `KEY`, `PHRASE` and `ORDER`.

`need_save` tells whether the rows have changed since the last load or save. Each time it changes, `on_need_save_changed` is called.

### Example

```python
from pinyintools.customphrasemodel import CustomPhraseModel

model = CustomPhraseModel("customphrase.txt")
model.load()
model.add_item("hi", "Hello", 1, True)
model.save()
```

### File functions

You can also use the file functions directly:

- `parse_custom_phrase_file(path)`
- `save_custom_phrase_file(path, items)`
- `custom_phrase_help_message()`

## Dictionary files

`DictionaryFileList(user_directory, system_directories, on_changed)` scans the given directories for `name.dict` files. The scan runs when the object is created and again on each `load()`.

- A file is disabled when a `name.dict.disable` marker exists in any of the scanned directories.
- Each row is a `DictionaryFile`, which has `name`, `enabled` and `display_name`. `display_name` is the name without `.dict`.
- `set_enabled(row, enabled)` changes one row and calls `on_changed` if the state changed.
- `save()` creates or removes the markers in the user directory.
- `find_file(name)` returns the row of a file, or 0 if there is no such file.

## Import pipelines

A `Pipeline` starts its jobs in order.

- When a job reports success, the next job starts.
- When a job reports failure, the run stops.
- When the run ends, whether it succeeded or failed, every job's `clean_up()` is called. Then `on_finished(result)` is called.
- Messages from jobs are passed on to `on_message(level, text)`, where `level` is a `MessageLevel`.
- `abort()` stops the running job.
- `reset()` drops all jobs.

To write your own job, subclass `PipelineJob` and implement `start`, `abort` and `clean_up`.

### Jobs in `pinyintools.jobs`

`FileDownloader(url, destination, opener)` downloads a URL into a file. The download runs inside `start()`, which blocks until it is done.

- It sends a `Referer` header with the URL's scheme and host.
- It reports progress in steps of ten percent.
- Its clean-up deletes the destination file.
- `opener` defaults to `urllib.request.urlopen`.

`RenameFile(source, destination)` moves a file into place. If the rename fails, it reports a critical message. It does not report a result, so the pipeline does not finish.

### Example

The downloader's clean-up deletes its file, so download to a temporary name and rename the file afterwards:

```python
from pinyintools.pipeline import Pipeline
from pinyintools.jobs import FileDownloader, RenameFile

pipeline = Pipeline(
    on_finished=lambda ok: print("done" if ok else "failed"),
    on_message=lambda level, text: print(level.name, text),
)
pipeline.add_job(FileDownloader("https://example.com/words.dict", "words.tmp"))
pipeline.add_job(RenameFile("words.tmp", "words.dict"))
pipeline.start()
```

## Sogou cell dictionary links

- `parse_download_link(url)` returns a `CellDictLink` with the `url`, `id` and decoded `name`. It returns `None` if the URL is not a download link on `pinyin.sogou.com` or `download.pinyin.sogou.com`.
- `classify_link(url)` returns a `Navigation` value:
  - `ACCEPT` for download links.
  - `ALLOW` for other pages on `pinyin.sogou.com`.
  - `REDIRECT_HOME` for everything else, meaning the caller should go back to `URL_BASE`.
- `decode_name(raw)` percent-decodes a name as UTF-8.

## What this package does not do

- There is no command-line program and no graphical editor. Everything is used as a library.
- The package does not convert text word lists or `.scel` cell dictionary files into `.dict` files, and no job runs an external converter. A pipeline can download and move files, but any conversion step must be supplied as your own `PipelineJob`.

## Running the tests

```
pytest
```