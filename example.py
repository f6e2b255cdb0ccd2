import gseabench

# differential expression tables, one file per dataset (columns: FC, ADJ.PVAL)
bench = gseabench.benchmark(
	datasets='data/de_tables',
	gene_sets='data/gene_sets/c2.cp.kegg.v6.0.symbols.gmt',
	methods=['ora', 'prerank'],
	outdir='out/benchmark',
	threads=4,
	permutation_num=100,
)

# runtime and statistical significance
print(bench.eval_runtime())
print(bench.eval_nr_sig_sets(alpha=0.05, padj='BH'))

# phenotype relevance, in % of the optimal score
rel = gseabench.read_relevance('data/malacards')
d2d = gseabench.read_disease_map('data/dataset2disease.txt')
res = bench.eval_relevance(rel, d2d)
print(res.as_percent())
for dataset, reason in res.omitted.items():
	print('omitted', dataset, reason)

# relevance of ORA rankings compared with random rankings
print(bench.rand_relevance(rel, d2d, method='ora', permutations=1000))

print('Done!')
