# scripts/load_orders_demo.py
import argparse, asyncio, json, time

from blob_order_loader.adapters.sinks.memory_sink import MemorySink
from blob_order_loader.services.batching.batch_accumulator import BatchAccumulator
from blob_order_loader.services.decoding.json_array_decoder import iter_records

async def read_chunks(path: str, chunk_size: int):
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            yield chunk

async def load(path: str, batch_size: int, chunk_size: int) -> MemorySink:
    sink = MemorySink()
    acc = BatchAccumulator(sink, batch_size=batch_size, label=path)
    async for record in iter_records(read_chunks(path, chunk_size)):
        await acc.accept(record)
    await acc.finish()
    return sink

def main():
    p = argparse.ArgumentParser(description="Stream a local JSON array of orders through the batcher (no database)")
    p.add_argument("path", help="JSON file holding one array of orders")
    p.add_argument("--batch-size", type=int, default=100)
    p.add_argument("--chunk-size", type=int, default=64 * 1024, help="Bytes read per chunk")
    p.add_argument("--sample", type=int, default=2, help="How many sample records to print from head/tail")
    args = p.parse_args()

    print(f"[i] Streaming {args.path} batch_size={args.batch_size} chunk_size={args.chunk_size}")
    t0 = time.perf_counter()
    sink = asyncio.run(load(args.path, args.batch_size, args.chunk_size))
    elapsed = time.perf_counter() - t0

    rows = sink.rows
    sizes = [len(b) for b in sink.batches]
    print(json.dumps({
        "records_total": len(rows),
        "batches": len(sizes),
        "full_batches": sum(1 for s in sizes if s == args.batch_size),
        "last_batch_size": sizes[-1] if sizes else 0,
        "elapsed_sec": round(elapsed, 3),
    }, ensure_ascii=False, indent=2))

    if rows:
        print("\n[i] First records:")
        print(json.dumps(rows[:args.sample], ensure_ascii=False, indent=2, default=str))
        print("\n[i] Last records:")
        print(json.dumps(rows[-args.sample:], ensure_ascii=False, indent=2, default=str))

if __name__ == "__main__":
    main()
