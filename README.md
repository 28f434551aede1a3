# netfilesend

Send files from one computer to another over a plain TCP connection. One side
runs as a **server** and waits for a single peer; the other side runs as a
**client** and connects to it. Once connected, one side sends files and the
other saves them in a folder named after its own role (`server/` or
`client/`).

Every transfer is a fixed-size header, holding the file's length and its name
in UTF-16, followed by the file's bytes.

## Installation

```
pip install .
```

## Command line

```
netfilesend {server,client} [FILES ...] [--host HOST] [--port PORT] [--dir DIR]
```

- `server` binds to `PORT` on every interface and waits for one client.
- `client` connects to `HOST`:`PORT`.
- `--host` defaults to `127.0.0.1`, `--port` to `30000`, and `--dir` (where
  the `server/` or `client/` folder of received files is created) to the
  current directory.

With `FILES` given, the command sends each file once connected, prints
`sent NAME (N bytes)` for each, and exits. Without them, it receives files
until the peer closes the connection, printing `received PATH` for each one
saved.

Start a receiving server:

```
netfilesend server --dir incoming
```

Send two files to it from another terminal:

```
netfilesend client report.pdf notes.txt --host 127.0.0.1 --port 30000
```

The roles can be swapped: a sending server and a receiving client work the
same way. On a socket error or a malformed header the command prints the error
and exits with status 1.

## Library use

- `netfilesend.protocol.FileHeader(name, length)` packs to and unpacks from
  `HEADER_SIZE` bytes with `pack()` and `FileHeader.unpack(data)`;
  `FileHeader.for_path(path)` builds one for a file on disk, and
  `encode_file(path)` returns header and content as one byte string.
- `netfilesend.transfer.Receiver` takes incoming chunks through `feed(data)`
  and returns the `ReceivedFile` objects (`name`, `data`) they complete;
  `received()` tells how many bytes of the current transfer have arrived and
  `reset()` drops a partial one. `save_received(received, mode, base_dir)`
  writes a file into the folder for the given `Mode`.
- `send_buffer(sock, data, log)` and `send_file(sock, path, log)` push data
  through a connected socket in pieces no larger than its send buffer,
  recording progress in a `ServiceLog` (numbered messages, newest first);
  `file_size(path)` gives a file's size.
- `netfilesend.session.Session(host, port, base_dir, log)` ties these
  together: `start_server()` and `accept()`, or `start_client()`; then
  `send_file(path)` and `receive()`; and `stop()`, also called on leaving a
  `with` block. `buffer_size(option)` reads a socket buffer size (or -1), and
  `set_receive_buffer(size, reset)` and `set_send_buffer(size, reset)` change
  it, or with `reset=True` restore the size the connection started with.

## What it does not do

There is no graphical interface, and the command line has no options for the
socket buffer sizes; those are reachable only through `Session`. A server
serves one client per run, and a run either sends or receives, not both.

## Running the tests

```
pip install .[test]
pytest
```